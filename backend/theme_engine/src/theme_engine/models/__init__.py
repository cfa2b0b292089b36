# This file makes the 'models' directory a Python sub-package
# within the 'theme_engine' service.
#
# It contains the Pydantic models for colors, generated scales,
# token trees, compiled themes and the request/response schemas
# of the HTTP API.
