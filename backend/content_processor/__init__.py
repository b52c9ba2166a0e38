"""
Content Processor

Turns a large markdown/plain-text study document into structured learning
material (theory blocks, quiz questions, coding tasks) by driving an LLM
backend over bounded, line-addressed chunks of the source.
"""

__version__ = "0.1.0"
