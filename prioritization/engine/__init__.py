"""
Netting Engine
==============

Concurrent per-circuit-group aggregation:
- channel: closable FIFO used for dispatch and result collection
- netting: vectorized supply/demand netting for one group
- workers: dispatcher, result sink and fixed-size worker pool
"""

from .channel import Channel, ChannelClosed
from .netting import KWH_TO_MWH, NetSupply, PeakMode, compute_group, net_supply
from .workers import ResultSink, WorkDispatcher, WorkerPool, max_parallelism

__all__ = [
    "Channel",
    "ChannelClosed",
    "KWH_TO_MWH",
    "NetSupply",
    "PeakMode",
    "compute_group",
    "net_supply",
    "ResultSink",
    "WorkDispatcher",
    "WorkerPool",
    "max_parallelism",
]
