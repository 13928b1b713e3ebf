"""领域层模型与协议。

包含：
- models: ConversationRequest / Message / Content 请求模型与 ConversationResponse 事件。
- conversation: 会话列表相关的响应模型。
- builders: 新会话请求的构造函数。
- exceptions: 业务异常类型定义。
"""
