#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.


class BaseFactory(object):
    """Factory to construct parsers and reporters based on a short name.

    Attributes:
        base_class (class): base class that registered classes must subclass
    """

    def __init__(self, base_class):
        self.base_class = base_class
        self.classes = {}

    @property
    def registered_names(self):
        """list of str: names registered with the factory, in sorted order."""
        return sorted(self.classes.keys())

    def create(self, name, *args, **kwargs):
        """Instantiate the class registered under name.

        Extra positional and keyword arguments go to the class constructor.

        Args:
            name (str): name the class was registered with
        """
        if name not in self.classes:
            raise KeyError('No {} named "{}". Known names: {}'.format(
                self.base_class.__name__, name,
                ', '.join(self.registered_names)))
        return self.classes[name](*args, **kwargs)

    def register(self, name, subclass):
        """Registers a class with the factory.

        Args:
            name (str): name used to look the class up later
            subclass (class): concrete subclass of base_class
        """
        assert issubclass(subclass, self.base_class)
        self.classes[name] = subclass
