"""
Kernel layer.

`cpswap/kernels/python/` holds the pure integer formulas (pricing, share
mint/burn, reward accrual). The stateful components in `cpswap/core/` call
into these and never duplicate the arithmetic.
"""
