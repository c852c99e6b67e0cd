from openassets.version import __version__
from openassets.lib.coloring_engine import ColoringEngine
from openassets.server.env import Env
