"""Test harness setup."""

import os

# Keep litellm from fetching its model cost map over the network in a
# background thread at import time; that fetch races test collection.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")
