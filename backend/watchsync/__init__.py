"""
watchsync - 观察员设备消息与报告状态同步
"""

__version__ = "0.1.0"
