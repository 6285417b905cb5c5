"""A lightweight TCP server framework: message routing, worker pools, a levelled logger, timing wheels and an area-of-interest grid."""

__version__ = "0.1.0"