"""
Tier list module.

Provides the tier assignment and persistence engine built on top of
tierengine:
- Model (items, buckets, workspace)
- Save (snapshot codec, persistence service, change tracker)
- Input (drag, resize, hover keys)
- Session (composition root with init/dispose)
"""
