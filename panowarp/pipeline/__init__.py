from .color_adjuster import adjust_gallery, process_image
from .panorama_projector import project_panorama, project_panorama_file

__all__ = ["process_image", "adjust_gallery", "project_panorama", "project_panorama_file"]
