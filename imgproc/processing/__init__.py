"""
Image processing operators.

Each module groups one family of operators; every operator takes Image
inputs and returns a new Image.
"""
