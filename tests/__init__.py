"""HDR bake test suite

- Transfer curves and the fitted ACES operator
- Frame encoding and 8-bit quantization
- Decoder / resampler / writer adapters
- End-to-end pipeline and CLI runs on synthetic float images
"""
