# -*- coding: utf-8 -*-
# Copyright (c) 2025 Jan Sarivuo

__author__ = "Jan Sarivuo"
__version__ = "1.0.0"
