"""Sheepfold: herd, health, feed and bookkeeping records for small sheep farms."""

VERSION = "1.0.0"
