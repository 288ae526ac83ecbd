import os
from pathlib import Path

from vxbot.util.yaml import load_yaml_config

PROJECT_ROOT = Path(os.environ.get("VXBOT_ROOT", Path.cwd()))

__all__ = ["PROJECT_ROOT", "load_yaml_config"]
