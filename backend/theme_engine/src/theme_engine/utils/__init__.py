# This file makes the 'utils' directory a Python sub-package
# within the 'theme_engine' service.
#
# Helpers for scope naming and for loading the preset theme library.
