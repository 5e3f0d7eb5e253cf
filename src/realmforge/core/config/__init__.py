"""
Configuration for Realmforge.

**Static (Config):** environment variables, loaded once at import.

**Balance (ConfigManager):** built-in defaults deep-merged with every YAML
file under `config/`, read with dot notation.

```python
from realmforge.core.config import Config, ConfigManager

ttl = Config.ATTEMPT_TTL_SECONDS
gold = ConfigManager.get("leveling.level_up_gold_per_level", 50)
```
"""

from realmforge.core.config.config import Config, Environment
from realmforge.core.config.manager import ConfigManager

__all__ = ["Config", "ConfigManager", "Environment"]
