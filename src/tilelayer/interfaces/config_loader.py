from abc import ABC, abstractmethod
from typing import Dict, Any


class IConfigLoader(ABC):
    """Interface for configuration loading"""
    
    @abstractmethod
    def load_config(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from file"""
        pass
    
    @abstractmethod
    def validate_config(self, config: Dict[str, Any]) -> bool:
        """Validate configuration"""
        pass
