#!/usr/bin/env python3
"""
Wager Ledger

Tracks moneyline, spread and total wagers, settles them when a game goes
final and reports profit, ROI and the equity curve.

Usage:
    python main.py init                                  # Initialize database
    python main.py games add G1 --home DUKE --away UNC   # Add a game
    python main.py bets add --game G1 --kind spread --selection "UNC +3.5" --odds -110 --stake 50
    python main.py games finalize G1 70 68               # Final score, settle wagers
    python main.py portfolio stats --timeframe 1M        # P&L and ROI
"""

from cli import cli

if __name__ == '__main__':
    cli()
