"""Application Layer.

Infrastructure adapters (Amap road snapping, visited-track stores) and the
HTTP application that orchestrates the exploration domain services.
"""
