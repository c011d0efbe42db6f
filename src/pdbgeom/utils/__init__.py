#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utilities package

Logging, tensor helpers, PDB column layout and cancellation support.
"""

from .logger import Logger
from .common import CancellationToken, check_cancelled, batched_range

__all__ = ['Logger', 'CancellationToken', 'check_cancelled', 'batched_range']
