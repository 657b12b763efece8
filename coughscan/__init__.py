"""
CoughScan

Cough-recording screening: MFCC and spectral feature extraction
followed by a rule-based respiratory condition scorer. A screening
aid for demos, not a medical diagnostic.
"""

__version__ = "1.0.0"
__author__ = "CoughScan Team"
