"""SurfaceScan feature modules."""
