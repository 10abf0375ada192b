"""Test suite for brandr.

Test Structure:
- unit/: Unit tests mirroring ``brandr.core`` and ``brandr.cli``
  - animation/: spec models, easing table, timeline engine
  - expressions/: compiler, graph builder, validation
  - export/: orchestrator, FFmpeg engine adapter, progress
  - assets/: storage, canvas, downloads, gallery
  - preview/: preview controller
- conftest.py: Shared fixtures and collaborator fakes
"""
