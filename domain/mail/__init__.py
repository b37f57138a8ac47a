"""邮件领域模块

该模块包含邮箱下载的领域模型，包括：
- 凭证、端点、命令标签、消息区间等值对象
- BatchFetchService 服务接口
- MessageStore 存储接口
"""
