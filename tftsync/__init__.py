# tftsync - Keep TFT screen designs and their drawing code in sync

from . import utils_core as Utils

Utils.loadConfiguration()

__version__ = Utils.__version__
