"""rigfit：装机兼容性与配置引擎"""
