"""LogBot: IRC channel event logging to a relational store."""

NAME = "LogBot3"
VERSION = "3.0"
