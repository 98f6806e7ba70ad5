import sys
import asyncio
import logging
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from curriculum.runtime import Curriculum


def main():
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("ContentVerification")

    content_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("content")

    try:
        logger.info(f"Loading content from {content_dir}...")
        curriculum = Curriculum.from_content(content_dir)

        module_ids = curriculum.registry.get_registered_module_ids()
        assert module_ids, f"No modules loaded from {content_dir}"

        actions = asyncio.run(curriculum.initialize())
        logger.info(f"Initially unlocked: {list(actions.to_unlock)}")

        worldmap = curriculum.generate_worldmap()
        logger.info(
            f"Worldmap: {len(worldmap.nodes)} nodes, "
            f"{len(worldmap.connections)} connections ({worldmap.layout})"
        )

        for module in curriculum.registry:
            logger.info(
                f"  {module.id}: {len(module.declared_tasks)} tasks, "
                f"{len(module.npcs)} NPCs, {len(module.objects)} objects"
            )

        logger.info("VERIFICATION SUCCESSFUL: All content loaded and validated.")

    except Exception as e:
        logger.error(f"VERIFICATION FAILED: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
