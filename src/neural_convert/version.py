_MAJOR = "0"
_MINOR = "3"
_PATCH = "0"
_SUFFIX = ""

VERSION = "{0}.{1}.{2}{3}".format(_MAJOR, _MINOR, _PATCH, _SUFFIX)
