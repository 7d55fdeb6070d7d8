"""
日志分析插件 - 源代码包

本包包含插件的核心实现，采用 DDD (领域驱动设计) 架构：
- application: 应用层 - 提交、调度分析任务
- domain: 领域层 - 任务实体、异常与回复格式化，平台无关
- infrastructure: 基础设施层 - 配置、执行策略、注册表、消息投递
- shared: 共享组件 - 跨层使用的常量
- utils: 工具函数与日志
"""
