"""
Shubhstra clinic bot: WhatsApp routing and response pipeline.
"""

__version__ = "1.0.0"
