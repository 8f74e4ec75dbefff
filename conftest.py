"""Global pytest configuration."""

import os

# Keep tests offline: no API key means the stub gateways are selected
# before paperlens.main builds its module-level app.
os.environ["OPENAI_API_KEY"] = ""
