"""
Milkman Ledger - Source Package

Records daily milk deliveries in two categories and bills them monthly.

DESIGN PRINCIPLES:
1. Overrides store quantities, never prices
2. The bill is always derived, never stored
3. Storage layer is swappable
4. The UI only shows what storage confirmed
"""

__version__ = "1.0.0"
