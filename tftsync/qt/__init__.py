# Qt layer for tftsync: editor surface, sync scheduler and controller
