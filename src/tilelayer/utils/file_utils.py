import os


class FileUtils:
    """Utility class for file operations"""
    
    @staticmethod
    def ensure_directory_exists(directory_path: str) -> None:
        """Create directory if it doesn't exist"""
        os.makedirs(directory_path, exist_ok=True)
    
    @staticmethod
    def get_tile_path(output_dir: str, layer_name: str, zoom: int, x: int, y: int, extension: str) -> str:
        """Generate tile file path <output>/<layer>/<z>/<x>/<y>.<ext>"""
        tile_dir = os.path.join(output_dir, layer_name, str(zoom), str(x))
        FileUtils.ensure_directory_exists(tile_dir)
        return os.path.join(tile_dir, f"{y}.{extension}")
    
    @staticmethod
    def guess_extension(url: str, default: str = 'png') -> str:
        """Extension of the URL path, ignoring the query string"""
        path = url.split('?', 1)[0].rsplit('/', 1)[-1]
        if '.' not in path:
            return default
        return path.rsplit('.', 1)[-1].lower() or default
