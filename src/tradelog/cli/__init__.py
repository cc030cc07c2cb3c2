"""tradelog command line interface."""
