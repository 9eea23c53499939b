""" oatscreen (Morris One-At-a-Time Screening)

    oatscreen builds Morris trajectory designs over a bounded, discretized input space and reduces the model
    responses along those trajectories to per-factor elementary effect statistics. The statistics are used to screen
    out factors which have a negligible influence on the model before a more expensive sensitivity analysis is done.
"""

import logging

from ._version import __version__, __version_info__

logging.getLogger('oatscreen').addHandler(logging.NullHandler())
