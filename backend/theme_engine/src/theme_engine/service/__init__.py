# This file makes the 'service' directory a Python sub-package
# within the 'theme_engine' service.
#
# It holds the engine itself: color math, the palette, typography and
# spacing generators, the token builder, the token compiler and the
# runtime style registry.
