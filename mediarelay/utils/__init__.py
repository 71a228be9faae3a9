from .tempfiles import remove_dir, remove_file, unique_temp_file

__all__ = ["remove_dir", "remove_file", "unique_temp_file"]
