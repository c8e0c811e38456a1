"""配置、异常、日志与指标等公共基础设施。"""
