"""
AI Landing Page Generator

Turns a short business description into an illustrative hero image and a
complete HTML landing page using Google's generative models, then serves the
merged page as an in-session preview.
"""

__version__ = "0.1.0"
