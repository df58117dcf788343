# License: MIT
# Copyright © 2026 Frequenz Energy-as-a-Service GmbH

"""Internal helpers, not part of the public API."""
