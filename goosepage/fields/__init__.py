from goosepage.fields.base import PyObjectId

__all__ = ["PyObjectId"]
