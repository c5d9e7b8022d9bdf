from __future__ import annotations

import logging
from dataclasses import dataclass, field

import appconfig


@dataclass
class SmokeConfig:
    name: str = field(default="", metadata={"yaml": "user_name"})
    email: str = field(default="", metadata={"yaml": "user_email"})
    launches: int = 0


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)
    logger = logging.getLogger("smoke")

    config = appconfig.load(SmokeConfig(), "appconfig-smoke")
    logger.info("Config loaded name=%s launches=%d", config.name, config.launches)

    config.launches += 1
    path = appconfig.update(config, "appconfig-smoke")
    logger.info("Config written path=%s", path)


if __name__ == "__main__":
    main()
