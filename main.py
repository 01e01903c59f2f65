"""
model-synth 命令行入口

生成一个道具模型并下载 GLB：
    python main.py "river rock obstacle" output/rock.glb
"""

import asyncio
import logging
import sys

from model_synth.infra.meshy_errors import MeshyError
from model_synth.services import ModelSynth

logger = logging.getLogger(__name__)


async def run(prompt: str, output_path: str) -> int:
    """
    生成模型并下载

    Returns:
        int: 进程退出码
    """
    async with ModelSynth() as synth:
        try:
            task = await synth.prop(prompt)
        except MeshyError as e:
            logger.error(f"Generation failed: {e}")
            return 1

        glb_url = task.model_urls.glb if task.model_urls else None
        if not glb_url:
            logger.error(f"Task {task.id} has no GLB output")
            return 1
        await synth.client.download(glb_url, output_path)
    return 0


def main() -> None:
    """
    启动生成

    配置日志并运行一次生成流程。
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if len(sys.argv) != 3:
        print("Usage: python main.py <prompt> <output.glb>", file=sys.stderr)
        sys.exit(2)

    sys.exit(asyncio.run(run(sys.argv[1], sys.argv[2])))


if __name__ == "__main__":
    main()
