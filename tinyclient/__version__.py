__title__ = "tinyclient"
__description__ = "A small, fluent builder for outbound HTTP requests."
__version__ = "0.1.0"
