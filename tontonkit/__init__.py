"""Read skinned glTF models and prepare skeletons, meshes, animations and articulations."""

__version__ = "1.0.0"