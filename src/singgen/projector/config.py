"""
Reserved literals shared by the projection stages.
"""

# Sentinel list element standing in for "every candidate node"
PLACEHOLDER = "{all}"

# Always-present terminal egress; the fallback result of an empty filter
SINK_TAG = "block"

# Key holding both definition lists (blocks) and reference lists (tags)
OUTBOUNDS_KEY = "outbounds"

# Per-block filter declaration, consumed during expansion
FILTER_KEY = "filter"

# Upper bound on prune/sanitize iterations
MAX_PASSES = 10
