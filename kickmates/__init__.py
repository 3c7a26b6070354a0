"""
KickMates: 运动活动约局、讨论区与私信

- kickmates.app: FastAPI 服务端入口
- kickmates.client: 客户端状态模型（评论树、投票合并、乐观消息发送）
"""

__version__ = "1.0.0"
