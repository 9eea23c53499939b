__version_info__ = (0, 3, 0)
__version__ = '.'.join(map(str, __version_info__))
