"""可复用的基础组件：日志、HTTP 客户端、响应封装与第三方认证"""
