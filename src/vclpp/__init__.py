"""VCL Preprocessor

Resolves #include files, expands #define constants and #macro blocks in VU
microcode sources before they are handed to VCL.
"""

__version__ = "0.1.0"
