from .context import *
from .errors import *
from .integer import *
from .rational import *
from .floating import *


__all__ = (context.__all__ + errors.__all__ + integer.__all__ + rational.__all__
           + floating.__all__)
