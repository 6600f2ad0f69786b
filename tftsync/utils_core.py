# Configuration helpers and metadata for tftsync
#
# Toolkit-independent: the core modules and the Qt layer both
# read their settings through here (``from . import utils_core as Utils``).
# System defaults live in tftsync.ini next to this file, user
# overrides in ~/.tftsync.

import configparser
import gettext
import os

__all__ = [
    "__version__", "__prg__",
    "prgpath", "iniSystem", "iniUser",
    "_",
    "config",
    "loadConfiguration", "saveConfiguration", "cleanConfiguration",
    "addSection",
    "getStr", "getInt", "getFloat", "getBool",
    "setBool", "setStr", "setInt", "setFloat",
]

__version__ = "0.3.0"
__prg__ = "tftsync"

prgpath = os.path.abspath(os.path.dirname(__file__))
iniSystem = os.path.join(prgpath, f"{__prg__}.ini")
iniUser = os.path.expanduser(f"~/.{__prg__}")

_ = gettext.translation(
    __prg__, os.path.join(prgpath, "locales"), fallback=True
).gettext


config = configparser.ConfigParser(interpolation=None)


# -----------------------------------------------------------------------------
# Load / save
# -----------------------------------------------------------------------------
def loadConfiguration(systemOnly=False):
    """Read the packaged defaults, then the user overrides.

    Values already in config are kept unless a file sets them again.
    """
    if systemOnly:
        config.read(iniSystem)
    else:
        config.read([iniSystem, iniUser])


def saveConfiguration(path=None):
    """Write the settings that differ from the packaged defaults."""
    with open(path or iniUser, "w") as f:
        cleanConfiguration().write(f)


def cleanConfiguration():
    """Return a copy of config without the values equal to the defaults."""
    defaults = configparser.ConfigParser(interpolation=None)
    defaults.read(iniSystem)
    changed = configparser.ConfigParser(interpolation=None)
    for section in config.sections():
        for item, value in config.items(section):
            if defaults.has_section(section) and \
                    defaults.get(section, item, fallback=None) == value:
                continue
            if not changed.has_section(section):
                changed.add_section(section)
            changed.set(section, item, value)
    return changed


def addSection(section):
    if not config.has_section(section):
        config.add_section(section)


# -----------------------------------------------------------------------------
# Typed access; a missing or malformed value gives the default
# -----------------------------------------------------------------------------
def _get(section, name, default, convert):
    try:
        return convert(config.get(section, name))
    except (configparser.Error, ValueError):
        return default


def getStr(section, name, default=""):
    return _get(section, name, default, str)


def getInt(section, name, default=0):
    return _get(section, name, default, int)


def getFloat(section, name, default=0.0):
    return _get(section, name, default, float)


def getBool(section, name, default=False):
    return _get(section, name, default, _boolean)


def _boolean(value):
    value = value.strip().lower()
    if value not in configparser.ConfigParser.BOOLEAN_STATES:
        raise ValueError(value)
    return configparser.ConfigParser.BOOLEAN_STATES[value]


def setStr(section, name, value):
    addSection(section)
    config.set(section, name, str(value))


def setBool(section, name, value):
    setStr(section, name, int(bool(value)))


setInt = setStr
setFloat = setStr
