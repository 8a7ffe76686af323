from trinav.loaders.obj_loader import OBJMeshData, load_obj_file

__all__ = ["OBJMeshData", "load_obj_file"]
