"""
Package marker for source code under `src`.
It groups the CMS API and its shared settings and logging helpers under a stable import path.
Most functionality lives in the sibling modules; this file intentionally stays lightweight.
"""
