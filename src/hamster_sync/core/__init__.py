from .config import Config
from .store import HamsterStore
from .workspace import Workspace

# Lets leave plugin as an explicit submodule for now
