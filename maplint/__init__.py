# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
maplint: suggest `map_or`/`and_then` for `Option` `map(..).unwrap_or(..)` chains.

Analysis modules live under this package. The CLI entrypoint is
`maplint.driver:main`.
"""

__all__ = []
