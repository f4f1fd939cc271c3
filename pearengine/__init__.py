"""A small scene-graph 3D engine with glTF loading, an event bus and OpenGL rendering."""

__version__ = "0.1.0"