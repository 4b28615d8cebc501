# ==============================================================================
# adapters/__init__.py - Version adapters
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
# ==============================================================================

# Support both direct script execution and module import
try:
    from .base import BaseVersionAdapter, apply_target
    from .node import NodeVersionAdapter
    from .flutter import FlutterVersionAdapter
    from .laravel import LaravelVersionAdapter
    from .go import GoVersionAdapter
    from .generic import GenericVersionAdapter
except ImportError:
    from adapters.base import BaseVersionAdapter, apply_target
    from adapters.node import NodeVersionAdapter
    from adapters.flutter import FlutterVersionAdapter
    from adapters.laravel import LaravelVersionAdapter
    from adapters.go import GoVersionAdapter
    from adapters.generic import GenericVersionAdapter

# Order matters for output only
ALL_ADAPTERS = [
    NodeVersionAdapter,
    FlutterVersionAdapter,
    LaravelVersionAdapter,
    GoVersionAdapter,
    GenericVersionAdapter,
]

__all__ = [
    'ALL_ADAPTERS',
    'BaseVersionAdapter',
    'apply_target',
    'NodeVersionAdapter',
    'FlutterVersionAdapter',
    'LaravelVersionAdapter',
    'GoVersionAdapter',
    'GenericVersionAdapter',
]
