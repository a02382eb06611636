"""
Payroll Kernel

Pure domain layer for the payroll and social-benefit liquidation engine:
- Immutable worker contract and snapshot value objects
- Decimal-only money arithmetic with explicit zero floors
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
