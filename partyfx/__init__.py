"""
partyfx - confetti bursts and ambient confetti showers for pygame
"""

__version__ = "0.1.0"
