# PAC Annotations Mapper
__version__ = "1.0.0"
