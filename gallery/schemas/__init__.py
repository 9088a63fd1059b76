# Schemas package (re-export feature modules for stable imports)
from .images.image import *
from .assistant.assistant import *
from .common.common import *
