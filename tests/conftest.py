"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

BANNER = (
    '# This file is generated by running "yarn install" inside your project.\n'
    "# Manual changes might be lost - proceed with caution!\n"
)

METADATA = "__metadata:\n  version: 6\n  cacheKey: 8\n"

BERRY_LOCK = (
    BANNER
    + "\n"
    + METADATA
    + """
"@babel/code-frame@npm:^7.0.0, @babel/code-frame@npm:^7.10.4":
  version: 7.12.13
  resolution: "@babel/code-frame@npm:7.12.13"
  dependencies:
    "@babel/highlight": ^7.12.13
  checksum: 471532bb7cf4224adb6bf5d1a5ab3adc5b9bd3a2a7ac2c9c3e9d7d1a55e8c6b2
  languageName: node
  linkType: hard

"debug@npm:2.6.9":
  version: 2.6.9
  resolution: "debug@npm:2.6.9"
  dependencies:
    ms: 2.0.0
  checksum: d2f51589ca66df60bf36e1fa6e4386b318c3f1e06772280eea5b1ae9fd3d05e9
  languageName: node
  linkType: hard

"fsevents@patch:fsevents@^2.1.2#~builtin<compat/fsevents>":
  version: 2.3.2
  resolution: "fsevents@patch:fsevents@npm%3A2.3.2#~builtin<compat/fsevents>::version=2.3.2&hash=18f3a7"
  dependencies:
    node-gyp: latest
  conditions: os=darwin
  languageName: node
  linkType: hard

"loose-envify@npm:^1.1.0":
  version: 1.4.0
  resolution: "loose-envify@npm:1.4.0"
  dependencies:
    js-tokens: ^3.0.0 || ^4.0.0
  bin:
    loose-envify: cli.js
  checksum: 6517e24e0cad87ec9888f500c5b5947032cdfe6ef65e1c1936a0c48a524b81e6
  languageName: node
  linkType: hard

"react-dom@npm:^17.0.2":
  version: 17.0.2
  resolution: "react-dom@npm:17.0.2"
  dependencies:
    loose-envify: ^1.1.0
  peerDependencies:
    react: 17.0.2
  peerDependenciesMeta:
    react:
      optional: true
  languageName: node
  linkType: hard

"root-workspace-0b6124@workspace:.":
  version: 0.0.0-use-local
  resolution: "root-workspace-0b6124@workspace:."
  dependencies:
    debug: 2.6.9
    fsevents: ^2.1.2
  dependenciesMeta:
    fsevents:
      optional: true
      built: false
  languageName: unknown
  linkType: soft
"""
)


@pytest.fixture
def berry_lock() -> str:
    """A small but realistic Yarn Berry lockfile."""
    return BERRY_LOCK


@pytest.fixture
def make_lockfile() -> Callable[[str], str]:
    """Wrap entry text with the standard banner and metadata block."""

    def _make(entries: str, metadata: str = METADATA) -> str:
        return BANNER + "\n" + metadata + "\n" + entries

    return _make
